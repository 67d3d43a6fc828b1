"""
Analysis package: structured data from the engine's stderr diagnostics.

Modules:
    constants  — Diagnostic markers, protocol names, and limits
    classify   — Per-line classifier (analysis marker, branch line, grid row)
    variations — Variation parser (visits, statistics, principal variation)
    labels     — A/B/C labels for the candidate moves
    heatmap    — Policy grid extraction and the grid-row counting barrier
    sgf        — GTP vertex conversion and SGF move-tree rendering
"""
