"""Constants shared by the manifest reconciliation steps."""

# Manifest asset
MANIFEST_FILENAME = "latest.json"
SIGNATURE_SUFFIX = ".sig"

# Installer signature orderings, highest priority first
NSIS_FIRST_PRIORITIES = (".nsis.zip.sig", ".exe.sig", ".msi.zip.sig", ".msi.sig")
MSI_FIRST_PRIORITIES = (".msi.zip.sig", ".msi.sig", ".nsis.zip.sig", ".exe.sig")
PRIORITY_BASE_SCORE = 100

# Characters GitHub rewrites to "." in uploaded asset names
ASSET_NAME_SEPARATORS = " ()[]{}"

# OS/arch vocabulary expected by the update client
OS_ALIASES = {"macos": "darwin"}
ARCH_ALIASES = {
    "amd64": "x86_64",
    "x86_64": "x86_64",
    "x64": "x86_64",
    "x86": "i686",
    "i386": "i686",
    "arm": "armv7",
    "arm64": "aarch64",
}
DARWIN = "darwin"
UNIVERSAL_ARCH = "universal"
UNIVERSAL_TARGET_ARCHES = ("aarch64", "x86_64")

# GitHub API
DEFAULT_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
ASSETS_PER_PAGE = 100
REQUEST_TIMEOUT_SECONDS = 30
NETWORK_RETRIES = 3
BACKOFF_BASE_SECONDS = 0.75

# Environment
TOKEN_ENV_VAR = "GITHUB_TOKEN"
REPOSITORY_ENV_VAR = "GITHUB_REPOSITORY"
API_URL_ENV_VAR = "GITHUB_API_URL"
