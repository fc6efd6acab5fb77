class ConversionError(ValueError):
    """Base class for every failure that aborts a conversion."""


class ComposeParseError(ConversionError):
    def __init__(self, cause: Exception | str):
        super().__init__(f"error unmarshalling YAML: {cause}")


class NoServicesError(ConversionError):
    def __init__(self):
        super().__init__("no services found in Docker Compose file")


class HclRenderError(ConversionError):
    def __init__(self, cause: Exception | str):
        super().__init__(f"error writing HCL: {cause}")
