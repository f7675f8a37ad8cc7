PACKAGE_LOCATION = "Package-Location"
PACKAGE_NAME = "Package-Name"
PACKAGE_FORMAT_ID = "Package-Format-Id"
CHECKSUM_ALGS = "Checksum-Algs"

BAGIT_PROFILE_ID = "BagIt-Profile-Identifier"
PACKAGE_MANIFEST = "Package-Manifest"

DEFAULT_PACKAGE_NAME = "MyPackage"
DEFAULT_PACKAGE_FORMAT_ID = "BOREM"
DEFAULT_BAGIT_PROFILE_ID = "http://dataconservancy.org/formats/data-conservancy-pkg-1.0"
DEFAULT_CHECKSUM_ALG = "sha256"

# supplied by the packager itself; never taken from caller metadata
RESERVED_METADATA_KEYS = frozenset({PACKAGE_MANIFEST, BAGIT_PROFILE_ID})
