from script_runner.cli import main

main()
