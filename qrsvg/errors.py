"""Exception types raised by qrsvg."""


class QRSVGError(Exception):
    """Base class for qrsvg errors."""


class StyleConfigError(QRSVGError, ValueError):
    """A style configuration value could not be parsed or is out of range."""


class LogoLoadError(QRSVGError):
    """A raster logo could not be fetched or decoded.

    Only raised inside the raster loader; the compositor turns it into a
    ``LogoOmitted`` outcome so the render still completes.
    """
