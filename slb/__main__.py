from slb.cli.app import main

main()
