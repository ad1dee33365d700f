"""Centralized domain schema constants for JSON and CSV payloads.

This module defines field names for session payloads exported by the sorting
tool, the tool's SQLite tables, and the JSON/CSV artefacts written by the
analysis commands. Import these constants instead of repeating string
literals across modules to avoid magic strings and keep schemas consistent.
"""

from __future__ import annotations

# Session payload schema (GET /sessions/:id) ---------------------------------

SESSION_ID_KEY = "id"
SESSION_NAME_KEY = "name"
SESSION_CATEGORIES_KEY = "categories"
SESSION_UNSORTED_KEY = "unsortedCards"

CATEGORY_ID_KEY = "id"
CATEGORY_NAME_KEY = "name"
CATEGORY_CARDS_KEY = "cards"

CARD_ID_KEY = "id"
CARD_TITLE_KEY = "title"
CARD_TEXT_KEY = "text"


# SQLite tables used by the sorting tool ------------------------------------

TABLE_SESSIONS = "sessions"
TABLE_CATEGORIES = "categories"
TABLE_SESSION_CARDS = "session_card_lists"


# Dendrogram JSON -------------------------------------------------------------

CLUSTER_NAME_KEY = "name"
CLUSTER_CHILDREN_KEY = "children"


# Cluster graph JSON ----------------------------------------------------------

GRAPH_NODES_KEY = "nodes"
GRAPH_LINKS_KEY = "links"
GRAPH_THRESHOLD_KEY = "threshold"
GRAPH_SESSION_COUNT_KEY = "session_count"

NODE_ID_KEY = "id"
NODE_CATEGORIES_KEY = "categories"

LINK_SOURCE_KEY = "source"
LINK_TARGET_KEY = "target"
LINK_VALUE_KEY = "value"


# Agreement pair CSV columns --------------------------------------------------

PAIR_CARD_A = "card_a"
PAIR_CARD_B = "card_b"
PAIR_AGREEMENT = "agreement"

PAIR_FIELDNAMES = [PAIR_CARD_A, PAIR_CARD_B, PAIR_AGREEMENT]
