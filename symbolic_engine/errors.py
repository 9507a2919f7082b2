class EngineError(Exception):
    """ Base class for all engine contract violations"""
    pass

class ArityError(EngineError):
    """ Raised when a node is built with the wrong number of children"""

class ShapeError(ArityError):
    """ Raised when a matrix is built with an entry count not matching its shape"""
