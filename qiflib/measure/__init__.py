"""Vulnerability, risk, entropy, predicate and d-privacy measures over priors and channels."""