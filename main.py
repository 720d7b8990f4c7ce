from rich.pretty import pprint

from cliroute import *


class Copy(Command):
    forwardable = True

    def main(self, argv, forwardable):
        self.context.log.info("copying %s (forwarding %s)", argv, forwardable)


class Show(Command):
    accepts_args = False

    def main(self, argv, forwardable):
        pprint(self.context.config)


if __name__ == '__main__':
    app = Application(
        Context("main"),
        commands={
            "copy": {"aliases": ["cp"], "locator": __name__, "class_name": "Copy"},
            "config": {"subcommands": {"show": {"locator": __name__, "class_name": "Show"}}},
        },
        version=__version__,
    )
    pprint(app.context.tree)
    raise SystemExit(app.start())
