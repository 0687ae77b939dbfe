from mcpmux_installer.cli import install

if __name__ == "__main__":
    install(prog_name="mcpmux-install")
