from bump_check.cli import main

main()
