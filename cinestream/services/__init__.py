"""Services d'orchestration au-dessus des adaptateurs."""
