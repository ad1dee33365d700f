"""Agreement analysis for card-sorting sessions.

This package contains the pairwise agreement matrix, the agglomerative
dendrogram builder, the co-occurrence cluster graph, and the plotting and
output helpers used by the ``cardsort-analyze`` command. It is installed via
the editable ``src/`` package layout.
"""
