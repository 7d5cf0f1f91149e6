"""Table-to-graph pipeline: gates, table loading, series, figures and export.

Nothing in this subpackage imports NiceGUI; the interactive window lives in
tgrapher.app.graph_app.
"""
