from rich.pretty import pprint

from mcfp import *

config = Config(
    "usage: main.py [options] file...",
    make_option("verbose,v", descr="more output, repeat for even more"),
    make_option("level", default=1, descr="compression level"),
    make_option("config,c", str, descr="alternative configuration file"),
    make_option("include,I", list[str], descr="extra include directories"),
    make_hidden_option("debug"),
    prog="main.py",
    shell=True,
)


if __name__ == '__main__':
    config.parse()
    config.parse_config_file("config", "main.conf", [".", "/etc"])
    if config.count("verbose") > 1:
        config.print_help()
    pprint(config.registry.options)
    pprint(config.operands)
