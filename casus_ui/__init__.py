"""
Editor-side collaborators of the connection graph: drag gestures and
hover highlighting.
"""
