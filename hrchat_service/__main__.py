"""Allow ``python -m hrchat_service``."""

from hrchat_service.cli.main import main

main()
