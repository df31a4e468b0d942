from cowtodo.cli import main

main()
