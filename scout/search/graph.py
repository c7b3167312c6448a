"""LangGraph state machine wiring.

State flows:

  expand -> ground -> fetch -> merge -> END

``expand`` is the only stage that can fail the whole run (unsupported
language).  ``ground`` degrades individual variants and only aborts on
rejected credentials.  ``fetch`` and ``merge`` never raise for per-URL
problems.
"""

from langgraph.graph import END, StateGraph

from scout.search.nodes import SearchNodes
from scout.search.state import SearchState


def build_graph(nodes: SearchNodes):
    """Construct and compile the search graph.  Returns a runnable."""
    g = StateGraph(SearchState)

    # -- add nodes ----------------------------------------------------------
    g.add_node("expand", nodes.expand_node)
    g.add_node("ground", nodes.ground_node)
    g.add_node("fetch", nodes.fetch_node)
    g.add_node("merge", nodes.merge_node)

    # -- edges --------------------------------------------------------------
    g.set_entry_point("expand")
    g.add_edge("expand", "ground")
    g.add_edge("ground", "fetch")
    g.add_edge("fetch", "merge")
    g.add_edge("merge", END)

    return g.compile()
