from vlapp.cli.app import main

main()
