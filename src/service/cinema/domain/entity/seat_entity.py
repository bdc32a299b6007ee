import attrs


@attrs.define
class Seat:
    id: str  # row letter + number, e.g. 'C7'
    row: str
    number: int
    is_available: bool
    is_selected: bool = False  # client-side selection state, never persisted

    @classmethod
    def create(cls, *, row: str, number: int, is_available: bool) -> 'Seat':
        return cls(id=f'{row}{number}', row=row, number=number, is_available=is_available)
