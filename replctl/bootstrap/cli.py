import sys

from replctl.bootstrap.deps import get_cli


def main():
    cli = get_cli()

    try:
        if cli.interactive:
            cli.cmdloop()
        else:
            sys.exit(cli.run())
    finally:
        cli.close()


if __name__ == "__main__":
    main()
