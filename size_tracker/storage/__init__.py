"""
Storage layer: size records, their codec and the git notes record store.
"""
