from kswitch.cli import main

main()
