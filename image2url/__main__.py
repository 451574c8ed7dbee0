"""Allow ``python -m image2url``."""

from .mcp.image2url_server import main

if __name__ == "__main__":
    main()
