# %% [markdown]
# To use figstudio, first import it:

# %%
import figstudio.plot as Plot

# %% [markdown]
# Charts start from a dataset and a mapping of **channels** (`x`, `y`, `z`, `color`, `symbol`, `size`, `text`) onto its columns. Columns are referenced with `Plot.col`; anything else (a list, an array, a pandas Series) is used as the data itself, and a bare string or number is a constant.

# %%
iris = {
    "sepal_length": [5.1, 4.9, 7.0, 6.4, 6.3, 5.8],
    "petal_length": [1.4, 1.4, 4.7, 4.5, 6.0, 5.1],
    "species": ["setosa", "setosa", "versicolor", "versicolor", "virginica", "virginica"],
}

Plot.chart(iris, x=Plot.col("sepal_length"), y=Plot.col("petal_length"))

# %% [markdown]
# ## Color
#
# Mapping `color` to a categorical column splits the chart into one trace per level, each with its own legend entry. Colors are picked from a named palette so that the chosen colors are as far apart as possible:

# %%
Plot.chart(
    iris,
    x=Plot.col("sepal_length"),
    y=Plot.col("petal_length"),
    color=Plot.col("species"),
    colors="Set1",
)

# %% [markdown]
# Numeric columns get a continuous color scale instead. Diverging palettes (`RdBu`, `PuOr`, `BrBG`, `Spectral`) pivot at zero when the data crosses it.

# %%
Plot.chart(
    x=[1, 2, 3, 4, 5],
    y=[2, 3, 2, 1, 8],
    color=[-2.0, -1.0, 0.0, 2.0, 4.0],
    colors="RdBu",
    size=12,
)

# %% [markdown]
# ## Adding traces
#
# Charts are immutable. Each trace added to a chart inherits the chart's channels, and may override them (or drop one by passing `None`):

# %%
base = Plot.chart(iris, x=Plot.col("sepal_length"), y=Plot.col("petal_length"))

base.add_lines(color="grey").add_markers(color=Plot.col("species"))

# %% [markdown]
# ## Layout
#
# Layout options are plain dicts added with `+`. Later options win, one top-level key at a time:

# %%
(
    base
    + Plot.title("Iris")
    + Plot.axis_titles("Sepal length", "Petal length")
    + Plot.size(500, 350)
    + {"xaxis": {"type": "log"}}
)

# %% [markdown]
# ## Matrices
#
# A matrix-valued `z` (or a matrix dataset) gives a heatmap by default:

# %%
Plot.chart([[1, 2, 3], [4, 5, 6], [7, 8, 9]], colors="Blues")

# %% [markdown]
# ## Subplots
#
# `&` puts charts side by side, `|` stacks them:

# %%
(base & Plot.chart(type="histogram", x=iris["petal_length"])) | Plot.chart(
    z=[[1, 2], [3, 4]]
)

# %% [markdown]
# ## Saving and publishing
#
# `save_html` writes a standalone page that loads plotly.js from a CDN; `save_image` renders it with a headless browser. `publish` uploads the figure to a plotly-compatible hosting service and returns its URL.

# %%
base.save_html("scratch/iris.html")

# %%
# Plot.configure(username="...", api_key="...")
# hosted = base.publish(filename="iris", sharing="secret")
# hosted.url
