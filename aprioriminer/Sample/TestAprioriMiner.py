import logging

from aprioriminer import AprioriMiner, TransactionDB


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # data = TransactionDB.from_file("Data/market_basket.txt")
    data = TransactionDB.build([['beer', 'doritos'],
                                ['apple', 'cheese'],
                                ['beer', 'doritos'],
                                ['apple', 'cheese'],
                                ['apple', 'cheese'],
                                ['apple', 'doritos']])
    miner = AprioriMiner(data, min_items=2, max_items=5, min_support=1, max_support=100, min_confidence=20)

    associations = miner.fit()

    if associations.rules:
        print("Association rules: \n")
        for rule in associations.rules:
            print(rule.to_s() + ", lift: " + str(round(rule.lift, 3)))

    itemsets = AprioriMiner(data, target='closed', min_support=1).fit()
    if itemsets.itemsets:
        print("\nClosed itemsets: \n")
        for itemset in itemsets.itemsets:
            print(itemset.to_s())

    significant = AprioriMiner(data, min_items=2, min_support=1, min_confidence=20, significance=0.05).fit()
    print("\nRules significant at the 5% level: \n")
    for rule in significant.rules:
        print(rule.to_s() + ", p-value: " + str(rule.p_value))


if __name__ == "__main__":
    main()
