from arborlight.cli import main

main()
