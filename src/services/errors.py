class SimilarityError(Exception):
    pass


class VectorLengthMismatchError(SimilarityError, ValueError):
    def __init__(self, length_a: int, length_b: int):
        super().__init__(f"Vectors must have the same length: {length_a} != {length_b}")
        self.length_a = length_a
        self.length_b = length_b
