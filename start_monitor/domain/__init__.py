"""
Domain layer: the measured sample and its static labels.
"""
