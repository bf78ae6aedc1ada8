class SelectionError(Exception):
    pass


class InvalidArity(SelectionError, ValueError):
    def __init__(self, count: int, expected: int = 4) -> None:
        super().__init__(f"Region needs exactly {expected} lasso points, got {count}")
        self.count = count
        self.expected = expected
