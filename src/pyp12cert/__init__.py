# This file initializes the pyp12cert package.
__version__ = "0.1.0"

from .container import BagType, Container, decode
from .exceptions import (
    P12Error,
    ContainerError,
    MalformedContainerError,
    DecodeError,
    AuthenticationError,
    NoCertificateFoundError,
    NoKeyBagFoundError,
    KeySelectionError,
    KeyDecodeError,
    ExpiredOrNotYetValidError,
    InvalidHexError,
)
from .certificate import CertInfo, RandomValues, ExtractionResult
from .extractor import extract_cert_info, draw_random_values
from .utilities import is_certificate_valid, cert_to_pem
