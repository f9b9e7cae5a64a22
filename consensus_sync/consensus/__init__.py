"""
Gossip convergence engine: endpoint discovery, inbound filtering,
accumulation policies, broadcasting and the loop that drives them.

Import from the subpackages directly.
"""
