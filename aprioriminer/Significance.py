import math

import numpy as np

from aprioriminer.Errors import InvariantViolation

LN_2 = math.log(2.0)

# relative accuracy and iteration limit of the incomplete gamma function evaluation
EPSILON = 1e-15
MAX_ITER = 1024
# smallest representable magnitude used by the continued fraction to avoid division by zero
TINY = 1e-300

# coefficients of the Lanczos approximation (g = 5, n = 6)
_LANCZOS = (76.18009172947146, -86.50532032941677, 24.01409824083091,
            -1.231739572450155, 0.1208650973866179e-2, -0.5395239384953e-5)


# ################## gamma function ###################
def log_gamma(n):
    """Logarithm of the gamma function for n > 0 (Lanczos approximation)."""
    if n <= 0:
        raise ValueError("log_gamma is only defined for positive arguments, got %r" % (n,))
    x = n
    tmp = n + 5.5
    tmp -= (n + 0.5) * math.log(tmp)
    ser = 1.000000000190015
    for coefficient in _LANCZOS:
        x += 1
        ser += coefficient / x
    return -tmp + math.log(2.5066282746310005 * ser / n)


def _lower_series(n, x):
    # series expansion of the regularized lower incomplete gamma function, converges fast for x < n + 1
    term = total = 1.0 / n
    a = n
    for _ in range(MAX_ITER):
        a += 1
        term *= x / a
        total += term
        if abs(term) < abs(total) * EPSILON:
            break
    return total * math.exp(n * math.log(x) - x - log_gamma(n))


def _upper_cfrac(n, x):
    # continued fraction of the regularized upper incomplete gamma function (modified Lentz), for x >= n + 1
    b = x + 1.0 - n
    c = 1.0 / TINY
    d = 1.0 / b
    h = d
    for i in range(1, MAX_ITER + 1):
        a = -i * (i - n)
        b += 2.0
        d = a * d + b
        if abs(d) < TINY:
            d = TINY
        c = b + a / c
        if abs(c) < TINY:
            c = TINY
        d = 1.0 / d
        delta = d * c
        h *= delta
        if abs(delta - 1.0) < EPSILON:
            break
    return math.exp(n * math.log(x) - x - log_gamma(n)) * h


def gamma_p(n, x):
    """Regularized lower incomplete gamma function P(n, x)."""
    if n <= 0:
        raise ValueError("gamma_p needs a positive shape, got %r" % (n,))
    if x <= 0:
        return 0.0
    if x < n + 1.0:
        return _lower_series(n, x)
    return 1.0 - _upper_cfrac(n, x)


def gamma_q(n, x):
    """Regularized upper incomplete gamma function Q(n, x) = 1 - P(n, x)."""
    if n <= 0:
        raise ValueError("gamma_q needs a positive shape, got %r" % (n,))
    if x <= 0:
        return 1.0
    if x < n + 1.0:
        return 1.0 - _lower_series(n, x)
    return _upper_cfrac(n, x)


def chi2_cdf(x, df=1):
    return gamma_p(0.5 * df, 0.5 * x)


def chi2_sf(x, df=1):
    # upper tail probability of the chi^2 distribution
    return gamma_q(0.5 * df, 0.5 * x)


# ################## contingency tables ###################
# A rule is described by four counts: set (transactions containing antecedent and consequent), body (antecedent),
# head (consequent) and n (all transactions).
def normalized_chi2(s_set, s_body, s_head, n):
    # chi^2 of the 2x2 table divided by n, 0 if a margin is empty or full
    if s_head <= 0 or s_head >= n or s_body <= 0 or s_body >= n:
        return 0.0
    t = float(s_head) * s_body - float(s_set) * n
    return (t * t) / (float(s_head) * (n - s_head) * s_body * (n - s_body))


def chi2_statistic(s_set, s_body, s_head, n):
    return n * normalized_chi2(s_set, s_body, s_head, n)


def chi2_pvalue(s_set, s_body, s_head, n):
    return chi2_sf(chi2_statistic(s_set, s_body, s_head, n), 1)


# ################## Fisher exact test ###################
# the logarithm of factorial
_log_factorials = [0.0]


# return the log of the factorial of n
def log_factorial(n):
    for i in range(len(_log_factorials), n + 1):
        _log_factorials.append(_log_factorials[i - 1] + np.log(i))
    return _log_factorials[n]


# return the p value for a one tailed fisher exact test for the probability of obtaining d or more in a
# contingency table where the marginal frequencies are invariant
def fisher_test(a, b, c, d):
    p = 0.0

    # will loop until b or c is 0 - as the values are interchangeable, make c the lesser value
    # and test only for when it reaches 0
    if b < c:
        b, c = c, b

    # use log factorial to scale down the Fisher Exact Test result in case large number
    invariant = -log_factorial(a + b + c + d) + log_factorial(a + b) + log_factorial(c + d) + \
        log_factorial(a + c) + log_factorial(b + d)

    while c >= 0:
        p += np.exp(invariant - log_factorial(a) - log_factorial(b) - log_factorial(c) - log_factorial(d))
        a += 1
        b -= 1
        c -= 1
        d += 1

    return min(float(p), 1.0)


def fisher_pvalue(s_set, s_body, s_head, n):
    return fisher_test(n - s_body - s_head + s_set, s_body - s_set, s_head - s_set, s_set)


# ################## additional rule evaluation measures ###################
def _none(s_set, s_body, s_head, n):
    return 1.0


def _diff(s_set, s_body, s_head, n):
    # absolute confidence difference to prior
    return abs(s_head / float(n) - s_set / float(s_body))


def _quot(s_set, s_body, s_head, n):
    # difference of confidence quotient to 1
    if s_head <= 0 or s_body <= 0:
        return 0.0
    t = (s_set / float(s_body)) / (s_head / float(n))
    return 1.0 - (1.0 / t if t > 1 else t)


def _aimp(s_set, s_body, s_head, n):
    # absolute difference of improvement value to 1
    if s_head <= 0 or s_body <= 0:
        return 0.0
    return abs((s_set / float(s_body)) / (s_head / float(n)) - 1.0)


def _info(s_set, s_body, s_head, n):
    # information difference to prior, in bits
    if s_head <= 0 or s_head >= n or s_body <= 0 or s_body >= n:
        return 0.0
    total = 0.0
    if s_set > 0:
        total += s_set * math.log(s_set / (float(s_head) * s_body))
    t = s_body - s_set
    if t > 0:
        total += t * math.log(t / (float(n - s_head) * s_body))
    t = s_head - s_set
    if t > 0:
        total += t * math.log(t / (float(s_head) * (n - s_body)))
    t = n - s_head - s_body + s_set
    if t > 0:
        total += t * math.log(t / (float(n - s_head) * (n - s_body)))
    return (math.log(n) + total / n) / LN_2


def _pval(s_set, s_body, s_head, n):
    # the chi^2 distribution function value of the table, 1 - p
    return chi2_cdf(chi2_statistic(s_set, s_body, s_head, n), 1)


RULE_MEASURES = {
    None: _none,
    'diff': _diff,
    'quot': _quot,
    'aimp': _aimp,
    'info': _info,
    'chi2': normalized_chi2,
    'pval': _pval,
}

PVALUE_TESTS = {
    'chi2': chi2_pvalue,
    'fisher': fisher_pvalue,
}


def rule_measure(name, s_set, s_body, s_head, n):
    try:
        measure = RULE_MEASURES[name]
    except KeyError:
        raise InvariantViolation("unknown rule evaluation measure %r" % (name,))
    return measure(s_set, s_body, s_head, n)


class SignificanceEvaluator:
    """Statistical significance filter for association rules.

    The 2x2 contingency table of a rule (antecedent present/absent x consequent
    present/absent) is taken from the transaction database. With the chi^2
    test the p-value is the upper tail of the chi^2 distribution with one
    degree of freedom, evaluated through the regularized upper incomplete
    gamma function. Rules whose p-value exceeds the threshold are considered
    indistinguishable from independent occurrence.
    """

    def __init__(self, threshold=0.05, test='chi2'):
        if test not in PVALUE_TESTS:
            raise InvariantViolation("unknown significance test %r" % (test,))
        self.threshold = threshold
        self.test = test
        self._pvalue = PVALUE_TESTS[test]

    def contingency(self, rule, database):
        catalog = database.catalog
        antecedent = tuple(catalog.id_of(label) for label in rule.antecedent)
        consequent = tuple(catalog.id_of(label) for label in rule.consequent_items)
        s_set = database.support_count_of(antecedent + consequent)
        s_body = database.support_count_of(antecedent)
        s_head = database.support_count_of(consequent)
        n = database.total_count()
        # both / antecedent only / consequent only / neither
        return s_set, s_body - s_set, s_head - s_set, n - s_body - s_head + s_set

    def evaluate(self, rule, database):
        both, body_only, head_only, neither = self.contingency(rule, database)
        return self.pvalue(both, both + body_only, both + head_only, both + body_only + head_only + neither)

    def pvalue(self, s_set, s_body, s_head, n):
        return self._pvalue(s_set, s_body, s_head, n)

    def is_significant(self, p_value):
        return p_value <= self.threshold
