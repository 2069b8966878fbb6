"""
Evaluation and similarity core for recommender algorithms.

Modules are grouped into data containers, similarity computation, model
contracts, evaluators, and run orchestration so concrete algorithms only need
to supply scoring hooks to be measured consistently.
"""
