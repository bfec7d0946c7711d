import sys

from rich.console import Console
from rich.pretty import pprint

from schemargs import Args
from schemargs.utils import Unset, coalesce

__prog__ = "schemargs"

console = Console()


def main(argv=Unset, /):
    """
    parse TOKEN... against SCHEMA and pretty-print the result.

    usage: main.py SCHEMA [TOKEN ...]
    e.g.   main.py 'l,p#,d*' -l -p80 -d/home/logs
    """
    argv = list(coalesce(argv, sys.argv[1:]))
    if not argv:
        console.print("usage: %s SCHEMA [TOKEN ...]" % __prog__)
        return 2
    schema, *tokens = argv
    pprint(Args(schema, tokens, prog=__prog__, shell=True, fancy=True), console=console)
    return 0


if __name__ == '__main__':
    sys.exit(main())
