PACKAGE_NAME = "thymescan"
PACKAGE_VERSION = "1.0.4"
PACKAGE_DESCRIPTION = "Thymeleaf template analysis: variable expressions, fragment references and preview data"
PACKAGE_AUTHOR = "thymescan contributors"
PACKAGE_AUTHOR_EMAIL = "thymescan@users.noreply.github.com"
PACKAGE_LICENSE = "MIT"
