#!/usr/bin/env python3
import getpass
import logging
import sys

from pyp12cert import AuthenticationError, ExpiredOrNotYetValidError, P12Error, extract_cert_info


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger("pyp12cert.example")

    if len(sys.argv) < 2:
        logger.error("usage: read_p12.py <container.p12> [password]")
        sys.exit(2)

    path = sys.argv[1]
    password = sys.argv[2] if len(sys.argv) > 2 else getpass.getpass("Container password: ")

    with open(path, "rb") as f:
        data = f.read()

    try:
        result = extract_cert_info(data, password)
    except AuthenticationError as e:
        logger.error(f"Wrong password: {e}")
        sys.exit(1)
    except ExpiredOrNotYetValidError as e:
        logger.error(str(e))
        sys.exit(1)
    except P12Error as e:
        logger.error(f"Unable to read {path}: {e}")
        sys.exit(1)

    info = result.cert_info
    logger.info(f"  Issuer: {info.issuer_name}")
    logger.info(f"  Serial number: {info.issuer_serial_number}")
    logger.info(f"  Digest (SHA-1): {info.digest_value}")
    logger.info(f"  Exponent: {info.exponent}")
    logger.info(f"  Signing time: {info.signing_time}")
    logger.info(f"  Random values: {result.random_values.as_dict()}")


if __name__ == "__main__":
    main()
