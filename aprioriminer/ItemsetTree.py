import logging

from joblib import Parallel, delayed

from aprioriminer.Errors import InvariantViolation, MiningCancelled
from aprioriminer.ItemsetRec import ItemsetRec, percent

log = logging.getLogger(__name__)

# parent handle of the nodes of the first level
ROOT = -1


class ItemsetNode:
    def __init__(self, item, parent, depth, count=0, cover=None):
        # the item that extends the parent's itemset
        self.item = item
        # handle of the parent node, ROOT for the first level
        self.parent = parent
        # number of items in the node's itemset
        self.depth = depth
        # number of transactions that contain the node's itemset
        self.count = count
        # handles of the child nodes, in increasing order of their items
        self.children = list()
        # ids of the covered transactions, only kept while the node is on the frontier
        self.cover = cover


class ItemsetTree:
    """Level-wise itemset enumeration tree.

    The nodes live in an arena (``self.nodes``) and refer to each other by
    integer handles. A node at depth k stands for the itemset made of the items
    on the path from the first level down to the node; children of a node are
    ordered by increasing item id, so every itemset is generated exactly once.

    Only frequent itemsets (support count >= min_count) are kept in the tree,
    an infrequent candidate is discarded and never extended. Itemsets whose
    support count exceeds max_count stay in the tree and are extended, but
    they are not reported.
    """

    def __init__(self, database, min_count, max_count, max_items=None, n_jobs=1):
        self.database = database
        self.catalog = database.catalog
        self.min_count = min_count
        self.max_count = max_count
        # the tree never grows deeper than the largest transaction
        self.max_items = database.max_size if max_items is None else min(max_items, database.max_size)
        self.n_jobs = n_jobs

        self.nodes = list()
        # handles of the nodes of each level, levels[0] holds the single items
        self.levels = list()
        # (parent handle, item) -> child handle
        self._index = dict()

    @property
    def height(self):
        return len(self.levels)

    def build(self, cancel=None):
        self._add_first_level()
        while self.levels[-1] and self.height < self.max_items:
            if cancel is not None and cancel():
                raise MiningCancelled(self.height + 1)
            if not self._add_level():
                break
        self._release_covers(self.levels[-1] if self.levels else [])
        log.info("itemset tree built: %d level(s), %d itemset(s)", self.height, len(self.nodes))
        return self

    # ################## level construction ###################
    def _add_first_level(self):
        level = []
        if self.max_items >= 1:
            for item in range(len(self.catalog)):
                if self.catalog.ignored(item):
                    continue
                count = self.catalog.count(item)
                if count < self.min_count:
                    continue
                level.append(self._new_node(item, ROOT, 1, count))
        self.levels.append(level)
        log.info("checking subsets of size 1: %d frequent item(s)", len(level))

    def _add_level(self):
        depth = self.height + 1
        candidates = list(self._candidates(self.levels[-1]))
        log.debug("level %d: %d candidate(s)", depth, len(candidates))

        covers = self._count(candidates)
        previous = self.levels[-1]

        level = []
        for (parent, item), cover in zip(candidates, covers):
            count = len(cover)
            if count > self.nodes[parent].count:
                raise InvariantViolation("support of %r exceeds the support of its prefix"
                                         % (self.itemset_of(parent) + (item,),))
            if count < self.min_count:
                continue
            level.append(self._new_node(item, parent, depth, count, cover))

        self._release_covers(previous)
        if not level:
            log.info("checking subsets of size %d: no frequent itemset", depth)
            return False
        self.levels.append(level)
        log.info("checking subsets of size %d: %d frequent itemset(s)", depth, len(level))
        return True

    def _candidates(self, level):
        # join siblings (same prefix, different last item) and prune by their immediate subsets
        siblings = []
        for handle in level + [None]:
            if siblings and (handle is None or self.nodes[handle].parent != self.nodes[siblings[0]].parent):
                for i, handle_i in enumerate(siblings):
                    prefix = self.itemset_of(handle_i)
                    for handle_j in siblings[i + 1:]:
                        item = self.nodes[handle_j].item
                        if self._subsets_frequent(prefix + (item,)):
                            yield handle_i, item
                siblings = []
            if handle is not None:
                siblings.append(handle)

    def _subsets_frequent(self, candidate):
        # the subsets without one of the last two items are the joined siblings themselves
        for index in range(len(candidate) - 2):
            if self.find(candidate[:index] + candidate[index + 1:]) is None:
                return False
        return True

    def _count(self, candidates):
        if not candidates:
            return []
        database = self.database

        def count_candidate(parent, item):
            node = self.nodes[parent]
            itemset = self.itemset_of(parent) + (item,)
            return database.cover_of(itemset, node.cover)

        if self.n_jobs == 1 or len(candidates) < 2:
            return [count_candidate(parent, item) for parent, item in candidates]
        # the database is read-only and each candidate gets its own result, so threads need no locking
        return Parallel(n_jobs=self.n_jobs, prefer='threads')(
            delayed(count_candidate)(parent, item) for parent, item in candidates)

    def _new_node(self, item, parent, depth, count, cover=None):
        handle = len(self.nodes)
        node = ItemsetNode(item, parent, depth, count, cover)
        if depth == 1:
            node.cover = self.database.cover_of((item,))
        self.nodes.append(node)
        self._index[(parent, item)] = handle
        if parent != ROOT:
            self.nodes[parent].children.append(handle)
        return handle

    def _release_covers(self, level):
        for handle in level:
            self.nodes[handle].cover = None

    # ################## queries ###################
    def find(self, itemset):
        handle = ROOT
        for item in itemset:
            handle = self._index.get((handle, item))
            if handle is None:
                return None
        return None if handle == ROOT else handle

    def itemset_of(self, handle):
        items = []
        while handle != ROOT:
            node = self.nodes[handle]
            items.append(node.item)
            handle = node.parent
        items.reverse()
        return tuple(items)

    def count_of(self, itemset):
        if not itemset:
            return self.database.total_count()
        handle = self.find(itemset)
        if handle is None:
            raise InvariantViolation("itemset %r is not frequent" % (tuple(itemset),))
        return self.nodes[handle].count

    def reported(self, handle):
        return self.nodes[handle].count <= self.max_count

    def handles(self, min_items=1, max_items=None):
        # handles of all reportable itemsets, by size and then in tree order
        for depth in range(min_items, self.height + 1):
            if max_items is not None and depth > max_items:
                break
            for handle in self.levels[depth - 1]:
                if self.reported(handle):
                    yield handle

    def itemsets(self, min_items=1, max_items=None, target='sets'):
        marked = None
        if target in ('closed', 'maximal'):
            marked = self._mark_subsets(closed=(target == 'closed'))

        total = self.database.total_count()
        result = []
        for handle in self.handles(min_items, max_items):
            if marked is not None and handle in marked:
                continue
            itemset = self.itemset_of(handle)
            count = self.nodes[handle].count
            result.append(ItemsetRec(itemset, count, percent(count, total), self.catalog.labels_of(itemset)))
        return result

    def _mark_subsets(self, closed):
        # mark every itemset that has a frequent superset one item larger (with equal support if closed)
        marked = set()
        for level in self.levels[1:]:
            for handle in level:
                itemset = self.itemset_of(handle)
                count = self.nodes[handle].count
                for index in range(len(itemset)):
                    subset = self.find(itemset[:index] + itemset[index + 1:])
                    if subset is None:
                        raise InvariantViolation("subset of frequent itemset %r missing from the tree" % (itemset,))
                    if not closed or self.nodes[subset].count == count:
                        marked.add(subset)
        return marked

