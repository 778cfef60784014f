from unifeast.application.menu.queries.assemble_menu import AssembleMenuQuery, MenuEntry

__all__ = ["AssembleMenuQuery", "MenuEntry"]
