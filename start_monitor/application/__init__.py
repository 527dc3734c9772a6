"""
Application layer: configuration, the start-time probe and the loop driving it.
"""
