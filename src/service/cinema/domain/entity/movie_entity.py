import attrs


@attrs.define
class Genre:
    id: int
    name: str


@attrs.define
class Movie:
    id: str
    title: str
    description: str
    duration: str  # e.g. '2h 15min', 'N/A' when runtime is unknown
    genre: str  # comma-joined genre names
    image_url: str
    rating: int  # 0-5, halved from the catalog's 0-10 score
