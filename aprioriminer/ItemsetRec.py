# ############################# Class ItemsetRec #############################
# a frequent itemset: the ascending list of its item ids together with its support
class ItemsetRec(list):
    def __init__(self,
                 items=(),
                 count=0,
                 support=0.0,
                 labels=()):
        super().__init__(items)
        # number of transactions that contain the itemset
        self.count = count
        # support in percent
        self.support = support
        # item labels in the order of the item ids
        self.labels = tuple(labels)

    def to_s(self):
        return "%s (%.1f/%d)" % (" ".join(self.labels), self.support, self.count)

    def __str__(self):
        return self.to_s()

    def __repr__(self):
        return "ItemsetRec(%s, count=%d)" % (list.__repr__(self), self.count)


# a count as a percentage of total, rounded to the one decimal place that is printed
def percent(count, total):
    return float("%.1f" % (100.0 * count / total)) if total else 0.0
