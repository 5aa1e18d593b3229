from caseinquiry.cli import main

main()
