from structlit.cli import main

main()
