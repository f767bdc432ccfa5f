class MissingSearchQueryError(Exception):
    def __init__(self) -> None:
        super().__init__("No search query provided")


class SpotifyTokenUnavailableError(Exception):
    def __init__(self) -> None:
        super().__init__("No Spotify access token available yet")


class SpotifyResponseError(Exception):
    """Spotify answered, but not with the shape we expected."""


class RegistrationError(Exception):
    pass
