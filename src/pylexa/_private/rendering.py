from typing import cast

from pylexa._private import util


class Renderable:
    """Mixin for automata that can draw themselves with graphviz. Subclasses
       implement `view()` returning a `graphviz.Digraph`."""

    def view(self, **kwargs) -> 'graphviz.Digraph':
        raise NotImplementedError

    def render(self, view=True, filename: str = 'automaton', format='pdf', tight=True, **kwargs):
        """
        Renders the automaton to a file and optionally opens the file.
        :param view: If True, the rendered file will be opened.
        :param format: The file format for the Digraph. Typically 'pdf', 'png', or 'svg'. View all formats: https://graphviz.org/docs/outputs/
        :param tight: If False, the rendered file will have whitespace margins around the graph.
        """
        import graphviz
        digraph = cast(graphviz.Digraph, self.view(**kwargs))
        digraph.format = format
        if tight:
            digraph.graph_attr['margin'] = '0' # Remove padding
        return digraph.render(view=view, filename=filename, cleanup=True)

    def show(self, **kwargs):
        """Display the diagram in an IPython frontend, e.g. from inside a loop
           where the Digraph would not be displayed automatically."""
        from IPython.display import display
        display(self.view(**kwargs))


def new_digraph(name: str, label: str = '') -> 'graphviz.Digraph':
    import graphviz
    if not util.check_graphviz_installed():
        raise EnvironmentError("Graphviz executable not found. Please install [Graphviz](https://www.graphviz.org/download/). On macOS, use `brew install graphviz`.")
    g = graphviz.Digraph(name, graph_attr={"label": label})
    g.attr(rankdir='LR', size='8,5')
    return g


def add_state(g, name: str, label: str, final: bool, initial: bool):
    shape = 'doublecircle' if final else 'circle'
    style = 'filled, bold' if initial else 'filled'
    g.node(name, label=label, shape=shape, style=style)
