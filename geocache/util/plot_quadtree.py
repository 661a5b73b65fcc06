import matplotlib.pyplot as plt
import matplotlib.patches
import numpy as np


def plot_quadtree(tree, highlight=None, out=None):
    q = tree.quadrant
    w = q.x1 - q.x0
    h = q.y1 - q.y0

    fig = plt.figure(figsize=(10, max(2, 10 * h / w) if w > 0 else 10))

    fig.gca().set_xlim((q.x0, q.x1))
    fig.gca().set_ylim((q.y0, q.y1))
    fig.gca().set_aspect('equal')

    _plot_node(fig.gca(), tree)

    points = np.array([ (n.x, n.y) for leaf in tree.leaves() for n in leaf.nodes ], dtype=float).reshape(-1, 2)
    if len(points) > 0:
        fig.gca().scatter(points[:,0], points[:,1], s=6, color='blue')

    if highlight is not None:
        r = _rectangle(highlight.quadrant, edgecolor='red', linewidth=2)
        fig.gca().add_patch(r)

    if out is None:
        plt.show()
    else:
        fig.savefig(out)
        plt.close(fig)


def _rectangle(q, **kwargs):
    return matplotlib.patches.Rectangle((q.x0, q.y0), q.x1 - q.x0, q.y1 - q.y0, fill=False, **kwargs)


def _plot_node(ax, node):
    ax.add_patch(_rectangle(node.quadrant, edgecolor='black', linewidth=0.5))

    if node.children is not None:
        for child in node.children:
            _plot_node(ax, child)
