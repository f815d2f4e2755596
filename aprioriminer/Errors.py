class AprioriError(Exception):
    """Base class of every error raised by the miner."""


class InputError(AprioriError):
    # raised for a malformed transaction; the transaction is skipped, never fatal
    def __init__(self, message, index=None):
        super().__init__(message)
        self.index = index


class ConfigError(AprioriError):
    pass


class ParseError(AprioriError):
    # raised for a line that does not match the rule line format
    def __init__(self, message, line_no=None, line=None):
        super().__init__(message)
        self.line_no = line_no
        self.line = line


class InvariantViolation(AprioriError):
    pass


class MiningCancelled(AprioriError):
    # raised when the caller aborts the search between two levels of the tree
    def __init__(self, level):
        super().__init__("mining cancelled before level %d" % level)
        self.level = level
