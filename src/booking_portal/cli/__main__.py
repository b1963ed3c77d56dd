from booking_portal.cli.main import main

main()
