class ShapeMismatch(ValueError):
    """Raised when the output tensors of one inference result disagree on shape."""
    pass
