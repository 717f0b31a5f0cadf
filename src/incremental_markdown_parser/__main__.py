import sys

from incremental_markdown_parser.cli import main

sys.exit(main())
