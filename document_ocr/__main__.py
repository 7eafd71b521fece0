import sys

from document_ocr.cli import main

sys.exit(main())
