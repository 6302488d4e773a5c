from cushionstats.cli.main import main

raise SystemExit(main())
