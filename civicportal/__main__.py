from civicportal.main import main

main()
