class InvalidParameter(ValueError):
    """
    Raised when a caller passes a value the fractal core cannot work with:
    non-finite or degenerate viewport bounds, a zero zoom factor, negative
    raster dimensions or a non-positive iteration budget.
    """
    pass
