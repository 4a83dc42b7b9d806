from phasefield.cli import main

raise SystemExit(main())
