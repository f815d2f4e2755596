from aprioriminer.Errors import InvariantViolation, InputError

# item appearance flags, an item may appear in the antecedent (body) and/or the consequent (head) of a rule
APP_NONE = 0x00
APP_BODY = 0x01
APP_HEAD = 0x02
APP_BOTH = APP_BODY | APP_HEAD

_APPEARANCE_NAMES = {
    APP_BODY: ("i", "in", "a", "ante", "antecedent", "b", "body"),
    APP_HEAD: ("o", "out", "c", "cons", "consequent", "h", "head"),
    APP_BOTH: ("io", "inout", "ac", "bh", "both"),
    APP_NONE: ("-", "n", "none", "x", "ignore"),
}


def parse_appearance(indicator):
    if isinstance(indicator, int) and not isinstance(indicator, bool) and APP_NONE <= indicator <= APP_BOTH:
        return indicator
    name = str(indicator).strip().lower()
    for code, names in _APPEARANCE_NAMES.items():
        if name in names:
            return code
    raise InputError("unknown appearance indicator %r" % (indicator,))


class ItemCatalog:
    """Maps item labels to dense integer ids and back.

    Ids are handed out in order of first appearance and stay stable for one
    mining run unless the catalog is explicitly recoded. Next to the labels the
    catalog keeps the number of transactions each item occurs in and the
    appearance flag of each item.
    """

    def __init__(self, default_appearance=APP_BOTH):
        # item labels indexed by item id
        self.labels = list()
        # item id indexed by label
        self.ids = dict()
        # number of transactions each item occurs in
        self.counts = list()
        # appearance flag of each item
        self.appearances = list()
        self.default_appearance = parse_appearance(default_appearance)
        # appearance flags of items that have not been interned yet
        self._pending_appearances = dict()

    def __len__(self):
        return len(self.labels)

    def intern(self, label):
        item = self.ids.get(label)
        if item is None:
            item = len(self.labels)
            self.ids[label] = item
            self.labels.append(label)
            self.counts.append(0)
            self.appearances.append(self._pending_appearances.pop(label, self.default_appearance))
        return item

    def id_of(self, label):
        try:
            return self.ids[label]
        except KeyError:
            raise InvariantViolation("unknown item %r" % (label,))

    def label_of(self, item):
        if not 0 <= item < len(self.labels):
            raise InvariantViolation("unknown item id %r" % (item,))
        return self.labels[item]

    def labels_of(self, itemset):
        return tuple(self.label_of(item) for item in itemset)

    def add_occurrence(self, item):
        self.counts[item] += 1

    def count(self, item):
        if not 0 <= item < len(self.counts):
            raise InvariantViolation("unknown item id %r" % (item,))
        return self.counts[item]

    def set_appearance(self, label, indicator):
        code = parse_appearance(indicator)
        if label in self.ids:
            self.appearances[self.ids[label]] = code
        else:
            self._pending_appearances[label] = code

    def appearance(self, item):
        return self.appearances[item]

    def may_be_antecedent(self, item):
        return bool(self.appearance(item) & APP_BODY)

    def may_be_consequent(self, item):
        return bool(self.appearance(item) & APP_HEAD)

    def ignored(self, item):
        return self.appearance(item) == APP_NONE

    def recode(self, order):
        """Reassign item ids.

        'ascending' and 'descending' sort the items on their occurrence count,
        ties keep the order of first appearance. Returns the list mapping each old
        id to its new id.
        """
        old_ids = list(range(len(self.labels)))
        if order == 'ascending':
            old_ids.sort(key=lambda item: self.counts[item])
        elif order == 'descending':
            old_ids.sort(key=lambda item: -self.counts[item])
        elif order != 'appearance':
            raise InvariantViolation("unknown item order %r" % (order,))

        id_map = [0] * len(old_ids)
        for new_id, old_id in enumerate(old_ids):
            id_map[old_id] = new_id

        self.labels = [self.labels[item] for item in old_ids]
        self.counts = [self.counts[item] for item in old_ids]
        self.appearances = [self.appearances[item] for item in old_ids]
        self.ids = {label: item for item, label in enumerate(self.labels)}
        return id_map
