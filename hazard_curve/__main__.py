from hazard_curve.cli import main

raise SystemExit(main())
