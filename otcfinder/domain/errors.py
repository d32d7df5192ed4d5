# otcfinder/domain/errors.py


class OtcFinderError(Exception):
    """Base class for domain errors."""


class EmptyIngredientError(OtcFinderError):
    def __init__(self, record_id: str):
        super().__init__(f"record {record_id!r} has no usable active ingredient")
        self.record_id = record_id


class UnknownCountryError(OtcFinderError):
    def __init__(self, country: str, supported):
        super().__init__(f"unsupported country {country!r}; expected one of {', '.join(supported)}")
        self.country = country
        self.supported = tuple(supported)


class CatalogLoadError(OtcFinderError):
    pass
