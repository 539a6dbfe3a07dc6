from countdown.cli.app import main

main()
