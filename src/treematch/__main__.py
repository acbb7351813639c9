from treematch.cli import main

raise SystemExit(main())
