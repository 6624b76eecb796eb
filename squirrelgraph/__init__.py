"""
squirrelgraph
=============
Compiles visual-scripting node graphs (as produced by the mod editor) into
Squirrel script source.

    from squirrelgraph.compiler import compile_graph

    source = compile_graph(nodes, connections)
"""

__version__ = "0.3.0"
