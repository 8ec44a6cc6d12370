"""Allow ``python -m valija``."""

from valija.main import main

raise SystemExit(main())
