import sys

from lark_webhook.action import main

if __name__ == "__main__":
    sys.exit(main())
