from upi_guard.cli import main

raise SystemExit(main())
