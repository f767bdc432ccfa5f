from dataclasses import dataclass


@dataclass(frozen=True)
class Registration:
    name: str | None
    amount_of_people: int
    # Comma Separated String, food selections in the order they were submitted
    food: str
    spotify_id: str | None
    track_suggestion: str | None
    other: str | None


@dataclass(frozen=True)
class TrackResponse:
    id: str
    artist: str
    title: str
    image_url: str

    @property
    def label(self) -> str:
        return f"{self.artist} - {self.title}"

    def to_json(self) -> dict[str, str]:
        return {
            "value": self.id,
            "artist": self.artist,
            "title": self.title,
            "image": self.image_url,
            "label": self.label,
        }
