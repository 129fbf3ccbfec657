from rdx.cli.app import main

main()
